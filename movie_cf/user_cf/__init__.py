"""Memory-based user-user collaborative filtering on MovieLens-style ratings.

Core idea:
- Score every pair (new user, other user) with Pearson correlation over co-rated movies
- Keep the k most similar users as the neighborhood
- Predict each unrated movie as the similarity-weighted average of neighbor ratings
"""
