"""Prompt template for suggesting a manufacturing base price and designer price."""

from ..models.schemas import PricingSuggestionRequest


def volume_m3(width_cm: float, depth_cm: float, height_cm: float) -> float:
    return width_cm * depth_cm * height_cm / 1_000_000


def pricing_prompt(req: PricingSuggestionRequest) -> str:
    """Build the pricing prompt.

    Use with `call_llm(messages=[{"role": "user", "content": prompt}])`.
    """
    d = req.dimensions
    return f"""\
You are a furniture pricing analyst. Calculate a competitive manufacturing base price for this designer furniture piece.

Product: {req.product_name}
Category: {req.category}
Description: {req.description}
Dimensions: {d.width}cm W x {d.depth}cm D x {d.height}cm H
Volume: {volume_m3(d.width, d.depth, d.height):.2f} cubic meters
Material: Resin reinforced with composite fibre, hybrid fabrication with hand-finishing

Pricing guidelines (in INR):
- Small decor items (vases, bowls, planters): base_price 3,000-8,000
- Medium items (side tables, stools, shelves): base_price 8,000-18,000
- Large items (chairs, benches, coffee tables): base_price 15,000-35,000
- Extra large items (dining tables, sofas, beds): base_price 30,000-60,000

Consider:
- Efficient batch production capabilities
- Competitive Indian manufacturing costs
- Volume-based cost optimization

Return ONLY a JSON object with this structure (no markdown, no explanation):
{{
  "designer_price": <number>,
  "base_price": <number>,
  "reasoning": "<brief explanation of pricing>"
}}

Designer price should be 1.5-2x the base manufacturing cost. Keep base prices affordable and competitive.
"""
