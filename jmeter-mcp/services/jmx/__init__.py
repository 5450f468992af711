# services/jmx/__init__.py
"""
JMeter JMX Builder Package

This package provides modular functions to create JMeter JMX script elements:
- plan.py: Test Plan and Thread Group
- samplers.py: HTTP Request samplers
- config_elements.py: HTTP Request Defaults, Header Manager
"""

from .config_elements import create_header_manager, create_http_defaults
from .plan import create_test_plan, create_thread_group
from .samplers import append_sampler, create_http_sampler

__all__ = [
    "create_test_plan",
    "create_thread_group",
    "create_http_defaults",
    "create_header_manager",
    "create_http_sampler",
    "append_sampler",
]
