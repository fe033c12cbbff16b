"""
Services layer - business logic for problems, organizations and onboarding.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- Filtering, sorting and statistics are pure functions over in-memory collections
- Firestore access stays in the *_service modules
"""
