# Supabase table: project_documentation
# Optional table; reads degrade to "no documentation" while it is missing.

"""
Expected Supabase table structure:

project_documentation:
- project_id: uuid (primary key, references projects.id on delete cascade)
- content: jsonb (nullable) - rich-text editor document
- content_text: text (nullable) - plain text derived from content, max 20000 chars
- updated_at: timestamp (default: now())
- updated_by: uuid (nullable, references auth.users.id)
"""
