"""
Insight Engine

Turns a user's footprint history into:
- Trend analysis (latest week vs the week before)
- Tips and achievements (bucketed by mean daily emission)
- Reduction goals (ephemeral, accepted goals become insights)

All logic is deterministic and explainable.
"""
