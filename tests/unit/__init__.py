"""
Unit tests for the UI Generation Layer.

Each area runs in isolation against stubs (ScriptedInvoker, httpx.MockTransport):
- Provider clients, rotator and resilient invoker
- Prompt builder and text utilities
- Structured output recovery (parsing, schema, correction rounds)
- Raters, rule tables and the multi-model blend
- File splitter, scaffolding and the generation pipeline states
- Project store, Figma design source and API helpers
"""
