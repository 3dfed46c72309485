# Supabase table: profiles
# One row per Supabase user, created on first read.

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- username: text (nullable) - GitHub login from the OAuth user metadata
- full_name: text (nullable)
- avatar_url: text (nullable)
- role: text (not null, default 'developer') - 'developer' | 'expert'
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
