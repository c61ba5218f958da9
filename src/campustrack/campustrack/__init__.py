"""CampusTrack package.

Attendance analytics and timetable grid management, organized by feature
modules (attendance, analytics, timetable, mdc, ...) with a thin Flask
controller layer over service/repository layers.
"""
