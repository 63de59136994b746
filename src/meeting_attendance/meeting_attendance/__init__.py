"""Meeting Attendance package.

This package is organized by feature modules (people, attendance, stats, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
