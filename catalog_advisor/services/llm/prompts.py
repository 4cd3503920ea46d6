"""
LLM Prompt Templates
====================

Prompt templates for the three generative tasks of the catalog advisor:

1. ``EXTRACTION_PROMPT_TEMPLATE`` - turn raw catalog text into product JSON
2. ``ASK_PROMPT_TEMPLATE`` - answer a question about the uploaded document
3. ``EXPLANATION_PROMPT_TEMPLATE`` - explain why products were recommended

Each ``get_*_messages`` helper returns the chat messages list expected by
``ChatCompletionClient.complete``.

Usage:
------
```python
from catalog_advisor.services.llm.prompts import get_extraction_messages

messages = get_extraction_messages(catalog_text, max_products=50)
response = await client.complete(messages, max_tokens=2048)
```
"""

from langchain_core.prompts import PromptTemplate

# =============================================================================
# PRODUCT EXTRACTION
# =============================================================================

EXTRACTION_SYSTEM_PROMPT = """You are a data extraction assistant that reads product catalogs.

IMPORTANT RULES:
1. Extract ONLY products that have at least a title AND a price
2. Prices are plain numbers: remove currency symbols and thousand separators
3. Do NOT invent or hallucinate data - only extract what is in the text
4. Ignore headers, page numbers, totals and contact details
5. Respond with JSON only, no commentary
"""

EXTRACTION_PROMPT_TEMPLATE = PromptTemplate.from_template(
    """Extract up to {max_products} products from the catalog text below.

CATALOG TEXT:
```
{catalog_text}
```

OUTPUT FORMAT:
Return a JSON array. Each element must look like:
{{"title": "Running Shoe", "category": "footwear", "price": 79.99, "description": "Lightweight trainer", "tags": ["running", "lightweight"]}}

- category: a short lowercase label, "general" if unclear
- description: one sentence or an empty string
- tags: up to 5 short lowercase keywords

If no products are found, return: []

JSON OUTPUT:"""
)

# =============================================================================
# QUESTION ANSWERING
# =============================================================================

ASK_SYSTEM_PROMPT = """You are a helpful AI assistant specialized in e-commerce product recommendations.
Your task is to help explain why certain products are being recommended based on the provided product catalog and user behavior data.
Guidelines for responses:
1. Use only the provided product catalog and the user's behavior to justify recommendations.
2. Provide concise, factual explanations focusing on matching attributes, past user actions, and inferred preferences.
3. If the catalog lacks information needed to justify a recommendation, state what data is missing.
4. Keep explanations user-friendly and actionable."""

ASK_PROMPT_TEMPLATE = PromptTemplate.from_template(
    """Please analyze the following product catalog context and user question. Use only the catalog to answer. If the catalog does not contain necessary details, explicitly state what's missing.

Catalog / Context:
{context}

Question: {query}

Provide a concise answer and, if appropriate, suggest at least 2 recommended products with short justifications."""
)

# =============================================================================
# RECOMMENDATION EXPLANATION
# =============================================================================

EXPLANATION_SYSTEM_PROMPT = "You produce brief explainability statements."

EXPLANATION_PROMPT_TEMPLATE = PromptTemplate.from_template(
    """You are an e-commerce recommendation explainability assistant. Given the catalog excerpt and user behavior, produce a short explanation for each recommended product explaining why it was recommended. Use only the information provided.

Catalog excerpt:
{catalog_excerpt}

User behavior:
{behavior_json}

Recommended products:
{recommended}"""
)


def get_extraction_messages(catalog_text: str, max_products: int) -> list[dict[str, str]]:
    """
    Build chat messages for LLM product extraction.

    Args:
        catalog_text: Document text, already truncated by the caller
        max_products: Upper bound on products the model should return

    Returns:
        System + user messages
    """
    return [
        {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": EXTRACTION_PROMPT_TEMPLATE.format(
                catalog_text=catalog_text,
                max_products=max_products,
            ),
        },
    ]


def get_ask_messages(context: str, query: str) -> list[dict[str, str]]:
    """Build chat messages for a question about the uploaded document."""
    return [
        {"role": "system", "content": ASK_SYSTEM_PROMPT},
        {"role": "user", "content": ASK_PROMPT_TEMPLATE.format(context=context, query=query)},
    ]


def get_explanation_messages(
    catalog_excerpt: str,
    behavior_json: str,
    recommended: str,
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": EXPLANATION_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": EXPLANATION_PROMPT_TEMPLATE.format(
                catalog_excerpt=catalog_excerpt,
                behavior_json=behavior_json,
                recommended=recommended,
            ),
        },
    ]
