"""Whitelabel - per-customer build file generator.

Renders mustache-style build templates (such as the Android
build.gradle.kts of a white-label Flutter app) into one build script per
customer. Signing configs, build types, dependency lists, application IDs
and display names come from YAML/JSON contexts.

Core principles:
- Reproducibility: Same template and context produce byte-identical output
- Fail-fast: Malformed templates fail at parse time, before any output
- Strict by default: Missing context values are errors, not empty strings
- CI/CD Compatibility: No interactive prompts, meaningful exit codes
"""

__version__ = "0.1.0"
__author__ = "Whitelabel Contributors"
