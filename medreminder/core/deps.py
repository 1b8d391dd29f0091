# medreminder/core/deps.py

from fastapi import Request


def get_auth_service(request: Request):
    return request.app.state.auth_service


def get_reminder_service(request: Request):
    return request.app.state.reminder_service
