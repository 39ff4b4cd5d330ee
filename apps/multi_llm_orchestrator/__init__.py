"""Multi-LLM orchestrator service: routes website-platform tasks to the best provider/model."""
