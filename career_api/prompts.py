ANALYSIS_SCHEMA = """{
  "executiveSummary": "A compelling 4-5 sentence summary highlighting their unique value proposition and career potential. Make it inspiring and specific.",
  "ikigaiAlignment": {
    "passionScore": (0-100),
    "missionScore": (0-100),
    "vocationScore": (0-100),
    "professionScore": (0-100),
    "overallAlignment": (0-100),
    "strengthAreas": ["area1", "area2", "area3"],
    "improvementAreas": ["area1", "area2"]
  },
  "careerRecommendations": [
    {
      "title": "Specific Job Title",
      "description": "Detailed 3-4 sentence description of role and daily activities",
      "matchScore": (0-100),
      "industry": "Specific industry name",
      "salaryRange": "$X - $Y (realistic current market rates)",
      "growthProjection": "High/Medium/Low with specific % if available",
      "requiredSkills": ["skill1", "skill2", "skill3"],
      "timeToEntry": "X months/years with specific pathway",
      "companies": ["Company1", "Company2", "Company3"],
      "remoteOptions": "High/Medium/Low"
    }
  ],
  "skillAnalysis": {
    "currentStrengths": ["strength1", "strength2", "strength3"],
    "transferableSkills": ["skill1", "skill2", "skill3"],
    "skillGaps": ["gap1", "gap2", "gap3"],
    "prioritySkills": [
      {
        "skill": "Specific skill name",
        "importance": "Critical/High/Medium",
        "timeToLearn": "X months",
        "learningPath": "Specific courses, certifications, or methods",
        "cost": "$X or Free"
      }
    ]
  },
  "marketAnalysis": {
    "industryTrends": ["trend1 with specific data", "trend2 with growth %"],
    "opportunityAreas": ["emerging area1", "growing sector2"],
    "competitorAnalysis": "Specific insights about competition and differentiation strategies",
    "demandForecast": "Detailed forecast with specific projections for next 3-5 years",
    "salaryTrends": "Current and projected salary movements",
    "geographicHotspots": ["City1", "City2", "Remote"]
  },
  "actionPlan": {
    "immediate": [
      {"action": "Very specific actionable step", "timeline": "X weeks", "priority": "Critical/High/Medium", "resources": ["resource1", "resource2"]}
    ],
    "shortTerm": [
      {"action": "Specific 3-6 month goal", "timeline": "X months", "priority": "Critical/High/Medium", "milestones": ["milestone1", "milestone2"]}
    ],
    "longTerm": [
      {"action": "Specific 1-3 year strategic goal", "timeline": "X years", "priority": "High/Medium", "successMetrics": ["metric1", "metric2"]}
    ]
  },
  "personalityInsights": {
    "workStyle": "Detailed description of optimal work environment and style",
    "motivationFactors": ["intrinsic motivator1", "extrinsic motivator2"],
    "potentialChallenges": ["challenge1 with mitigation", "challenge2 with solution"],
    "idealWorkEnvironment": "Specific environment description",
    "leadershipStyle": "Natural leadership approach",
    "communicationPreferences": "Optimal communication methods"
  },
  "networkingStrategy": {
    "targetConnections": ["specific role1", "industry expert2", "mentor type3"],
    "platforms": ["LinkedIn with strategy", "platform2", "industry forum3"],
    "events": ["conference type1", "meetup type2", "workshop type3"],
    "contentStrategy": "Specific content creation recommendations",
    "mentorshipPlan": "How to find and approach mentors"
  },
  "compensationGuidance": {
    "negotiationStrategies": ["strategy1", "strategy2"],
    "benefitsToConsider": ["benefit1", "benefit2", "benefit3"],
    "equityConsiderations": "Advice on equity vs salary",
    "careerProgression": "Typical progression path and timeline"
  }
}"""

SYSTEM_INSTRUCTION = (
    "You are an expert career analyst and executive coach. "
    "Always respond with valid JSON only, no additional text or markdown. "
    "Ensure all fields are properly filled with realistic, actionable data."
)

STRICT_SYSTEM_INSTRUCTION = """You are an expert career analyst and executive coach.
Always respond with strictly valid JSON. Do not include markdown (like triple backticks), explanations, or comments.
Only respond with a single JSON object as output.
Make sure all JSON syntax is valid (no trailing commas, properly quoted keys, correct data types).

Example of valid response format:
{
  "executiveSummary": "A compelling summary",
  "ikigaiAlignment": {
    "passionScore": 85,
    "missionScore": 90
  }
}"""

# ---------------------------
# Career analysis prompt
# ---------------------------
def build_analysis_prompt(love: str, good_at: str, paid_for: str, world_needs: str) -> str:
    return f"""
You are a team of world-class career analysts, executive coaches, and industry researchers with 20+ years of experience. Analyze the following Ikigai responses and create a comprehensive, actionable career analysis.

IKIGAI RESPONSES:
- What they LOVE: {love}
- What they're GOOD AT: {good_at}
- What they can be PAID FOR: {paid_for}
- What the world NEEDS: {world_needs}

Provide a detailed analysis in JSON format with this exact structure:
{ANALYSIS_SCHEMA}

Use current market data, be specific with numbers, companies, and actionable advice. Make recommendations highly personalized based on their specific responses.

Return a single JSON object only. No markdown, no commentary, no text before or after the JSON.
"""


def build_messages(prompt: str, strict: bool = False) -> list[dict]:
    system = STRICT_SYSTEM_INSTRUCTION if strict else SYSTEM_INSTRUCTION
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]

# ---------------------------
# Resume extraction prompt
# ---------------------------
RESUME_SCHEMA = """{
  "personal_info": {
    "name": "string | null",
    "title": "string | null",
    "linkedin_url": "string | null",
    "email": "string | null",
    "phone": "string | null",
    "location": "string | null"
  },
  "professional_experience": [
    {
      "company": "string | null",
      "location": "string | null",
      "role": "string | null",
      "start_date": "string | null",
      "end_date": "string | null",
      "responsibilities": "list[string] | null"
    }
  ],
  "education": [
    {
      "institution": "string | null",
      "location": "string | null",
      "degree": "string | null",
      "start_date": "string | null",
      "end_date": "string | null"
    }
  ],
  "technical_skills": {
    "technical_skills": "list[string] | null",
    "frameworks_libraries": "list[string] | null",
    "tools": "list[string] | null"
  },
  "additional_information": "list[string] | null",
  "projects": [
    {
      "project_name": "string | null",
      "description": "string | null",
      "tech_stack": "list[string] | null"
    }
  ]
}"""


def build_resume_prompt(resume_content: str) -> str:
    return f"""
Extract ONLY the information that is EXPLICITLY mentioned in the resume content provided below.
DO NOT make any assumptions or inferences about missing information.
If a piece of information is not explicitly stated in the resume, set it to null.
Format the extracted information as a JSON object according to the schema provided.

Resume Content:
```
{resume_content}
```

JSON Schema:
```json
{RESUME_SCHEMA}
```

Important Rules:
1. ONLY extract information that is EXPLICITLY stated in the resume
2. DO NOT infer or guess values for any fields
3. If a field is not explicitly mentioned, set it to null
4. For dates, only extract if they are clearly stated in the resume
5. For skills, only include those that are explicitly listed
6. If a section is not present in the resume, set all its fields to null

Project Extraction Rules:
1. Look for projects in ANY section of the resume, not just dedicated project sections
2. Each project should have a name (can be taken from the description if not explicitly stated)
3. If a project has no description, set it to an empty string
4. For each project, extract the tech stack mentioned in its description
5. If no tech stack is mentioned for a project, set it to an empty list

Ensure that the JSON object is valid and all extracted information is placed in the correct fields.
For lists, if no items are found, return an empty list.
"""
