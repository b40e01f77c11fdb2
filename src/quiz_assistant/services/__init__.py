"""
Services package for Knowledge Quiz Assistant.
Contains the completion backends and the flow business logic.

Import concrete services from their modules, e.g.
``from quiz_assistant.services.evaluation_service import AnswerEvaluationService``.
The SDK and pdfplumber are only loaded when a completion backend module is imported.
"""
