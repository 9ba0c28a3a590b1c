"""HR attendance package.

Feature modules (attendance, devices, ingestion, holidays, ...) each carry
their own model, repository and service layers, with a thin Flask
controller on top.
"""
