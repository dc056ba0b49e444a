"""
LLM Batch Package.

Root package for batching prompt files through on-device and cloud
text-generation backends:
- core: Prompt loading, prefix analysis, retry dispatch, record encoding, batch runner
- llm: Backend abstraction, concrete backends and factory
- config: Configuration loading and validation
- cli: Command-line argument parsing and script framework
"""
