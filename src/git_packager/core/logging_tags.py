# git_packager/core/logging_tags.py
"""
Subsystem tags prefixed to log messages so output stays searchable.
"""

GIT = "[GIT]"
DIFF = "[DIFF]"
RESOLVE = "[RESOLVE]"
STAGING = "[STAGING]"
CONVERT = "[CONVERT]"
PACKAGE = "[PACKAGE]"
CLI = "[CLI]"
