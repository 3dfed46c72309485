# Supabase table: project_documents + storage bucket: project_documents
# Attachment rows are insert-only; blobs live under <owner_id>/<project_id>/.

"""
Expected Supabase table structure:

project_documents:
- id: uuid (primary key, default gen_random_uuid())
- project_id: uuid (not null, references projects.id on delete cascade)
- file_name: text (not null)
- file_path: text (not null) - object key inside the bucket
- file_url: text (nullable) - public URL
- content_type: text (nullable)
- size: bigint (nullable)
- created_at: timestamp (default: now())
"""
