"""
ChillGamer persistence layer on top of a MongoDB document store
"""
