# Constants for the top products report and the hybrid search ranking.

# Top products per category
TOP_PRODUCTS_PER_CATEGORY = 5  # leaderboard length cap

# Hybrid search ranking
SEARCH_RESULT_LIMIT = 20  # final number of ranked products returned

# Blend weights for the composite score (sum to 1)
W_SIMILARITY = 0.4
W_POPULARITY = 0.4
W_PRICE = 0.2

# Width of the price bell curve, as a fraction of the budget
PRICE_SCALE_RATIO = 0.5
