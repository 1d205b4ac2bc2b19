"""Expression representation, visitor base, configuration and errors"""
