"""Message templates for operator-facing reports."""

REPORT_HEADER = """
# Log Diagnosis
"""

REPORT_SECTION_TARGET = """
**Target:** {source}
"""

REPORT_SECTION_ANALYSIS = """
## Assistant analysis
{response}
"""

REPORT_SECTION_SUGGESTIONS = """
## Suggested fixes
{suggestions}
"""

REPORT_SECTION_APPLIED = """
## Auto-applied fixes
{applied}
"""

REPORT_NO_SUGGESTIONS = """
## Suggested fixes
No actionable fix could be derived from the assistant's answer.
"""
