"""Test package of ExpenseClient.

The client config is redirected to a temporary directory and Qt is switched to
the offscreen platform before the application package is first imported.
"""
import os
import tempfile

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')
os.environ['EXPENSECLIENT_CONFIG_DIR'] = tempfile.mkdtemp(prefix='expenseclient_test_')
os.environ.pop('EXPENSECLIENT_API_BASE_URL', None)
