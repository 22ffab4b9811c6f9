"""Editor subpackage: settings UI components for configuration management.

This package provides Qt widgets to edit the application settings:
    - metadata_editor: edit general settings (locale, currency, theme, paging, dashboard)
    - server_editor: edit the REST base url and the request timeout
"""
