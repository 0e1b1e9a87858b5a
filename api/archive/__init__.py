"""Archive records carrying descriptive signature paths"""
