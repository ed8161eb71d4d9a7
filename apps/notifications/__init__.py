"""Notifications app package.

E-mails citizens when their booking changes state. Domain events are
routed by the message bus to ``handlers``, which enqueue Celery tasks
that deliver through Django's mail API.
"""
