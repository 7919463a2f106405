"""
External collaborators: animation scheduling, sound, and the AI quiz/translation service.
"""
