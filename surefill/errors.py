"""The single error kind raised by surefill.

Every failure, whether raised while configuring a context or while generating
a value, is a GenerationError. None of them are transient: a failure means a
mapping is missing or a type cannot be synthesized, so fix the test instead of
retrying.
"""


class GenerationError(ValueError):
    """A value could not be generated or a context could not be configured."""
