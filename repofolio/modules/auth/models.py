# Supabase Auth + table: user_tokens
# Sessions are issued and verified by Supabase Auth (GitHub provider).
# The GitHub provider token is not kept by Supabase, so it is stored here.

"""
Expected Supabase table structure:

user_tokens:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (unique, not null, references auth.users.id on delete cascade)
- github_token: text (not null)
- github_id: bigint (nullable)
- username: text (nullable)
- email: text (nullable)
- avatar_url: text (nullable)
- profile_url: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Rows are upserted on conflict (user_id) every time the client links GitHub;
they are never deleted explicitly.
"""
