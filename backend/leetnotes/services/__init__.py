# Services package init
"""
LeetNotes Backend — Services Layer
====================================

What:  Business logic between the routes (HTTP) and the database.

Service Inventory:
    - SupabaseAuthService: bearer token → AuthenticatedUser
    - FetcherService:      runs the LeetCode fetcher subprocess, validates stdout
    - IngestionService:    writes profile stats, problems and submissions
    - ProblemService:      per-user problem / profile-stats queries
    - LLMService (abstract) / GeminiService: prompt → generated text
    - NoteService:         problem → prompt → Gemini → sections → upserted note
    - section_parser, prompt_builder: pure helpers used by NoteService

Every service receives the session and the verified user id explicitly; none
keeps per-request state.
"""
