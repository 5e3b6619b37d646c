"""Education Center package.

Organized by feature modules (schedules, students, attendance, ledger,
statistics) with a thin Flask controller layer over service/repository layers.
"""
