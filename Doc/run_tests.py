#!/usr/bin/env python
"""
Test runner script for the shopdesk apps
Usage: python Doc/run_tests.py [app ...]
"""
import os
import sys
from pathlib import Path

import django
from django.conf import settings
from django.test.utils import get_runner

APPS = [
    'shopdesk.core',
    'shopdesk.locations',
    'shopdesk.catalog',
    'shopdesk.inventory',
    'shopdesk.parties',
    'shopdesk.pos',
    'shopdesk.finance',
    'shopdesk.hrms',
    'shopdesk.reports',
]

if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'shopdesk.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    labels = [f'shopdesk.{name}' for name in sys.argv[1:]] or APPS
    failures = test_runner.run_tests(labels)
    sys.exit(bool(failures))
