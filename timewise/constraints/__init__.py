from .validator import TimetableValidator
