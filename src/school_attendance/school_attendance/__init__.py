"""School attendance package.

Organized by feature modules (attendance, schedules, classes, ...) with a thin
Flask controller layer on top of service/repository layers.
"""
