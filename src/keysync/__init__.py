"""
i18n-keysync: translation key extraction and catalog reconciliation
"""

__version__ = "0.1.0"
