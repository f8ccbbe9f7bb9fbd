"""
Template name constants.

Pure constants - no I/O or file system knowledge.
"""


class Template:
    """Template name constants. Use these instead of raw strings."""

    CLASSIFIER_SYSTEM = "classifier_system"
    COMPOSER_SYSTEM = "composer_system"
