"""
Publication pipeline: the request state, the steps, and the engine
that sequences them.

Import the engine from ``pubflow.pipeline.engine``; this package module
stays import-free so the service adapters can use ``pipeline.errors``.
"""
