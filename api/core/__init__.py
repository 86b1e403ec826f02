"""
Shared, cross-cutting code for the survey API.

`core/` holds the small building blocks every feature uses (settings, DB
wiring, logging). Survey SQL and validation live in `survey/`.
"""
