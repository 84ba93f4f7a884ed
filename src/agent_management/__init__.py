"""Agent Management package.

Organized by feature modules (users, groups, clients, attendance, ...) with a
thin Flask controller layer over service and repository layers. Role scoping
lives in ``hierarchy`` and ``authorization``.
"""
