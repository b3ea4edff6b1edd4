"""
Commerce Tutor - AI-generated study material with local progress tracking.

Subpackages:
- storage: key/value substrate, progress records and the content cache
- generation: prompts, the Gemini content provider and the fetch orchestrator
- study: learning and quiz session controllers, progress summaries
- cli: terminal front end
"""

__version__ = "1.0.0"
