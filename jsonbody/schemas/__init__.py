"""
schemas/ - Pydantic models for jsonbody response bodies
"""
