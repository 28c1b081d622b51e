from engine.recommendation.composer import RecommendationComposer, calculate_suitability_score
from engine.recommendation.summary import SummaryWriter, template_summary
