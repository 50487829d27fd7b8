"""
Integration tests for the UI Generation Layer.

The FastAPI app is exercised through TestClient with dependency overrides:
scripted providers, rule-based evaluation and a project store under tmp_path.
Marked with @pytest.mark.integration.
"""
