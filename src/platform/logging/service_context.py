"""
Service context for log lines: `{service}@{env}:{instance}`.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'cinema-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container hostnames identify the replica; fall back to the PID locally
    instance = os.getenv('HOSTNAME') or socket.gethostname() or ''
    if not instance or deploy_env == 'local_dev':
        instance = str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance[:12]}'
