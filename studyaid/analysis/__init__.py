from studyaid.analysis.adapter import AnalysisClientAdapter
from studyaid.analysis.cache import AnalysisCache
from studyaid.analysis.context import AnalysisContext
from studyaid.analysis.factory import AnalysisClientFactory
from studyaid.analysis.parser import parse_file_analysis, parse_quiz, parse_study_guide
from studyaid.analysis.service import AnalysisService

__all__ = [
    "AnalysisCache",
    "AnalysisClientAdapter",
    "AnalysisClientFactory",
    "AnalysisContext",
    "AnalysisService",
    "parse_file_analysis",
    "parse_quiz",
    "parse_study_guide",
]
