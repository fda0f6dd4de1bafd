"""
Fastform engine

Validation and workflow core for declarative AppSpec apps:

    from fastform.services.spec_validator import is_valid_app_spec, load_app_spec
    from fastform.services.submission_validator import validate_submission
    from fastform.services.sanitizer import sanitize_submission_data
    from fastform.services.workflow import validate_transition
"""

__version__ = "0.3.0"
