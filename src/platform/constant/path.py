from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Rotated DEBUG log files
LOG_DIR = BASE_DIR / 'logs'
