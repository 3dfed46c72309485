# Supabase table: projects
# One row per imported GitHub repository.

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key, default gen_random_uuid())
- user_id: uuid (not null, references profiles.id on delete cascade)
- github_repo_id: bigint (unique, not null) - conflict key for re-imports
- repository_full_name: text (not null) - owner/repo
- name, description, html_url, language, visibility, owner_username, default_branch: text
- private, fork: boolean
- stars, forks, watchers, open_issues: integer (default 0)
- pushed_at, created_at_github, updated_at_github, last_synced_at: timestamp
- notes: text (nullable)
- tags: text[] (nullable)
- status: text (default 'draft') - 'draft' | 'in_review' | 'published'
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Re-importing a repository merges the fresh GitHub snapshot into the existing
row (upsert on github_repo_id); notes, tags and status are never part of the
snapshot, so reviewer annotations survive a re-sync.
"""
