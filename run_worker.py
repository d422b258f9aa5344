"""
Audit worker launcher

    python run_worker.py

Kept apart from worker.py so the worker module is only ever imported as
`worker` (tasks.audit imports it too) and its shutdown handlers connect once.
"""

from worker import main

if __name__ == "__main__":
    main()
