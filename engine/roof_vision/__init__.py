from engine.roof_vision.analyzer import RoofVisionAnalyzer
from engine.roof_vision.heuristic import HeuristicRoofEstimator
from engine.roof_vision.providers import GeminiVisionProvider, parse_json_object
from engine.roof_vision.sanitize import combine_analyses, sanitize_existing_installation, sanitize_roof
