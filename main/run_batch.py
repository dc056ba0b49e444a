# main/run_batch.py

"""
Run every prompt of a text file through a text-generation backend.

Usage:
  python main/run_batch.py --input prompts.txt --backend ollama

See ``--help`` for all options. Backend settings live in config/model_config.yaml.
"""

from llmbatch.cli.batch_command import main


if __name__ == "__main__":
    main()
