"""
Entry point for running the editor core as a module.

Usage:
    python -m timetable init project.json
    python -m timetable validate project.json
    python -m timetable blocks project.json t1
    python -m timetable view project.json --class 3-1
"""

from timetable.cli import main

if __name__ == "__main__":
    main()
