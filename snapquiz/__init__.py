"""Application package for the SnapQuiz test generation & scoring backend."""
