"""Technology catalog for the stack advisor.

Holds the static knowledge base of frontend, backend, database and hosting
technologies together with the questionnaire used to score them.
"""

__version__ = "0.1.0"
