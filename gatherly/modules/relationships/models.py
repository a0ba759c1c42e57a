# Supabase tables: friendships, follows
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

friendships:
- id: uuid (primary key)
- user_id: uuid (foreign key to user_profiles.id, not null, on delete cascade) - requester
- friend_id: uuid (foreign key to user_profiles.id, not null, on delete cascade) - target
- status: text (not null, default: 'pending') - values: pending, accepted, rejected
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
- unique index on (least(user_id, friend_id), greatest(user_id, friend_id))
- check constraint user_id <> friend_id

follows:
- id: uuid (primary key)
- follower_id: uuid (foreign key to user_profiles.id, not null, on delete cascade)
- following_id: uuid (foreign key to user_profiles.id, not null, on delete cascade)
- created_at: timestamp (default: now())
- unique constraint on (follower_id, following_id)
- check constraint follower_id <> following_id

The friendships index covers the unordered pair, so two users sending each
other a request at the same time leave exactly one edge behind.
"""
