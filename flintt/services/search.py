from typing import Dict, Iterable, List, Optional


def search_posts(posts: Iterable[Dict], query: str = '', only_images: bool = False,
                 only_videos: bool = False, only_liked: bool = False,
                 only_saved: bool = False, user_id: Optional[str] = None) -> List[Dict]:
    """Filter posts by caption text, media type and the viewer's reactions.

    ``only_images`` wins when both media filters are set. The reaction
    filters need ``user_id`` and match nothing without it.
    """
    needle = (query or '').strip().lower()
    if only_images:
        only_videos = False
    uid = str(user_id) if user_id is not None else None

    results = []
    for post in posts:
        if needle and needle not in (post.get('caption') or '').lower():
            continue
        if only_images and post.get('media_type') != 'image':
            continue
        if only_videos and post.get('media_type') != 'video':
            continue
        if only_liked and uid not in [str(x) for x in post.get('likes') or []]:
            continue
        if only_saved and uid not in [str(x) for x in post.get('hearts') or []]:
            continue
        results.append(post)
    return results
