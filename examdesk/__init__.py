"""
Examdesk - Exam Administration and Customer Access API

An admin API for exam records and customer accounts, with token based
authentication and self-service token recovery.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- config: Environment driven configuration
- storage: Record store abstraction (Redis or in-memory)
- auth: Signed admin tokens and the admin request gate
- customers: Customer credential store
- recovery: Single-use recovery grants
- notify: Outbound notifications (outbox mailer)
- accounts: Account lifecycle orchestration
- exams: Exam record management
- api: REST API models
"""

__version__ = "1.0.0"
