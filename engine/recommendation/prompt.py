SYSTEM_INSTRUCTIONS = """
You are a friendly solar energy advisor for Prince Edward Island, Canada.
You write short, encouraging but realistic summaries for homeowners.
"""

SUMMARY_PROMPT = """
Based on the following analysis, write a 2-3 sentence personalized summary for the property owner.

Property Analysis:
- Roof area: {roof_area} m²
- Usable area: {usable_percentage}%
- Shading: {shading_level}
- Roof pitch: {roof_pitch}°
- Complexity: {complexity}

Recommended System:
- Size: {system_size_kw} kW
- Estimated cost: ${installation_cost:,.0f}
- Annual savings: ${annual_savings:,.0f}
- Payback period: {payback}
- 25-year savings: ${twenty_five_year_savings:,.0f}
- Available incentives: ${total_funding:,.0f}

Focus on the positive aspects while being honest about any limitations. Mention Maritime Electric
rates and PEI-specific benefits like cold weather efficiency. Keep it under 100 words. Plain text only.
"""
