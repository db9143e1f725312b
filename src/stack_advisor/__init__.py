"""Tech Stack Advisor.

Scores a technology catalog against questionnaire answers and turns
free-form model replies into structured stack recommendations.
"""

__version__ = "0.1.0"
