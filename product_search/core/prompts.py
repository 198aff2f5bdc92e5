"""
Text templates shared by the indexer and the resolver.
"""

from typing import Dict, List

from .schema import CatalogItem, Match, MatchResult

DEFAULT_SYSTEM_PROMPT = (
    "You are a useful assistant. You always reply with a short and funny message. "
    "If you do not know an answer, you say 'I don't know that.' "
    "You only answer questions related to outdoor camping products. "
    "For any other type of questions, explain to the user that you only answer "
    "outdoor camping products questions. Do not store memory of the chat conversation."
)


def describe_item(item: CatalogItem) -> str:
    """Embedding-ready description of what an item is."""
    return f"[{item.name}] is a product that costs [{item.price}] and is described as [{item.description}]"


def matched_prompt(query: str, item: CatalogItem) -> str:
    return (
        "You are an intelligent assistant helping clients with their search about outdoor products. "
        "Generate a catchy and friendly message using the following information:\n"
        f"    - Found Product Name: {item.name}\n"
        f"    - Found Product Description: {item.description}\n"
        f"    - Found Product Price: {item.price}\n"
        f"    - User Question: {query}\n"
        "Include the found product information in the response to the user question."
    )


def unmatched_prompt(query: str) -> str:
    return (
        "You are an intelligent assistant helping clients with their search about outdoor products.\n"
        f"    - User Question: {query}\n"
        "The question did not match any product in the catalog. "
        "Tell the user, in a short and friendly way, that you don't know of a product for that. "
        "Do not suggest, name or invent any product."
    )


def build_messages(system_prompt: str, query: str, match: MatchResult) -> List[Dict[str, str]]:
    """Two-message grounding instruction for the generation port."""
    if isinstance(match, Match):
        user_content = matched_prompt(query, match.item)
    else:
        user_content = unmatched_prompt(query)

    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]
