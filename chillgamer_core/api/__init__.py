"""
ChillGamer core REST API package
"""
