"""
Utility subpackage for odm_webmap:
- io            → JSON read & write, directory ensure
- logging_utils → unified logger setup
"""
