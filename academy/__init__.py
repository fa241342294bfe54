"""Upper Hound Dog Grooming Academy: invitation-only onboarding service."""
