"""
Gemini prompts for document classification, extraction and comparison.

The classification prompt is a contract with the model: the JSON shape the
rest of the pipeline relies on comes from this exact wording, so it must be
sent verbatim.
"""

import json
import re
from typing import Any, Dict, List


DOCUMENT_CLASSIFICATION_PROMPT = """You are an expert AI assistant that processes business documents. Your responsibilities include:

### 🎯 OBJECTIVES:
1. **Classify** the input document into one of the below predefined types and subtypes.
2. **Extract key content** into a structured **JSON format**, using the appropriate schema that fits the classified document type.

### 📚 DOCUMENT TYPES & SUBTYPES:
1. **Procurement & Finance**
   - Purchase Order (PO)
   - Invoice
   - Payment Advice

2. **Insurance & Claims**
   - Claim Form
   - Accident Report

3. **Banking & Loan Origination**
   - Loan Application
   - Property Appraisal

4. **Legal & Compliance**
   - Contract
   - Company Filings

5. **HR & Onboarding**
   - Offer Letter
   - Resume
   - Job Description

6. **Healthcare**
   - Prescription
   - Treatment Summary

7. **Trade & Export/Import**
   - Letter of Credit
   - Customs Declarations

8. **Education & Certification**
   - Student Application
   - Certificates

Return ONLY a valid JSON object with the classification and extracted data. Do not include any additional text or markdown formatting."""


QUICK_CLASSIFICATION_PROMPT = """
Analyze this document and classify it into one of these categories:
- invoice
- purchase_order
- bill
- receipt
- email
- report
- other

Return ONLY a JSON object with this exact structure:
{
  "classification": "one_of_above_categories",
  "confidence": 0.X,
  "metadata": {
    "detected_date": "YYYY-MM-DD",
    "detected_amount": "X.XX",
    "detected_entity": "Entity Name if Present",
    "detected_id": "Document ID/Number if Present"
  }
}
"""


INVOICE_EXTRACTION_PROMPT = """You are an expert invoice data extraction AI. Extract all relevant information from this invoice document and return it as a structured JSON object.

Extract the following fields:
- invoice_number: The invoice number
- invoice_date: Date in YYYY-MM-DD format
- vendor_name: Name of the vendor/supplier
- po_number: Purchase order number (if present)
- total_amount: Total amount due
- gst_rate: GST/tax rate percentage
- gst_amount: GST/tax amount
- line_items: Array of line items with description, quantity, unit_price, total
- extraction_confidence: Your confidence level (0.0 to 1.0)

Return ONLY valid JSON without any markdown formatting or explanations."""


COMPARISON_PROMPT = """
You are an intelligent document comparison agent that analyzes and compares documents across the following categories and subtypes:
1. Procurement & Finance: Purchase Order (PO), Invoice, Payment Advice
2. Insurance & Claims: Claim Form, Accident Report
3. Banking & Loan Origination: Loan Application, Property Appraisal
4. Legal & Compliance: Contract, Company Filings
5. HR & Onboarding: Job Description, Resume
6. Healthcare: Prescription, Treatment Summary
7. Trade & Export/Import: Letter of Credit, Customs Declarations
8. Education & Certification: Student Application, Certificates

Your task is to perform context-aware comparisons and deliver JSON results with detailed analysis.

### Core Functions:

#### 1. Document Classification & Context Understanding
- Detect document types and subtypes from content/metadata.
- Identify business context (e.g., HR recruitment, procurement compliance).
- Adapt comparison logic per category/subtype with enhanced field analysis.

**Enhanced HR & Onboarding Analysis**:
- **Job Description Analysis**: Extract role requirements, skills (technical/soft), experience levels, qualifications, responsibilities
- **Resume Analysis**: Extract candidate profile, skills matrix, experience timeline, education, certifications, achievements
- **Skill Matching**: Perform semantic analysis on skills (e.g., "JavaScript" matches "JS", "Python programming" matches "Python")
- **Experience Evaluation**: Calculate total experience, relevant experience, leadership experience
- **Qualification Alignment**: Compare degree fields, certifications, professional licenses

**Enhanced Procurement & Finance Analysis**:
- **Purchase Order Analysis**: Extract vendor details, line items, pricing, terms, delivery dates
- **Invoice Analysis**: Extract billing information, payment terms, line item matching
- **Financial Validation**: Check amount discrepancies, tax calculations, currency consistency

#### 2. Multi-Target Comparison Logic
- Compare 1 source against multiple targets with detailed scoring.
- Generate individual target scores and consolidated analysis.
- Highlight patterns, anomalies, and recommendations.

#### 3. Enhanced Field Analysis with Business Rules

**Enhanced Business Rules Table**:
| Category                  | Subtype            | Key Fields                         | Enhanced Rules                                      | Weights (Field1/Field2/Field3) |
|---------------------------|--------------------|------------------------------------|----------------------------------------------------|--------------------------------|
| HR & Onboarding           | Job Description    | Skills, Experience, Qualifications | Semantic skill matching (85% threshold), ±2 year experience tolerance, field-related qualifications (75% threshold) | 50%/30%/20% |
|                           | Resume             | Skills, Experience, Qualifications | Skills portfolio analysis, career progression evaluation, certification relevance | 45%/35%/20% |
| Procurement & Finance     | PO, Invoice        | Vendor, Total, Line Items          | Enhanced vendor fuzzy matching (92% threshold), 3% total tolerance, detailed line item analysis | 25%/35%/40% |
|                           | Payment Advice     | Amount, Invoice Reference          | Exact amount match, reference validation          | 30%/70%                        |
| Insurance & Claims        | Claim Form         | Claimant, Amount                   | Enhanced name matching, 8% amount tolerance       | 35%/40%/25%                    |
|                           | Accident Report    | Injured, Date                      | Person identification, temporal accuracy          | 35%/40%/25%                    |
| Banking & Loan Origination| Loan Application   | Applicant, Loan Amount             | Identity verification, 8% amount tolerance        | 35%/40%/25%                    |
|                           | Property Appraisal | Property, Value                    | Address verification, 12% value tolerance         | 35%/40%/25%                    |
| Legal & Compliance        | Contract           | Parties, Terms                     | Enhanced party matching, term correlation         | 35%/40%/25%                    |
|                           | Company Filings    | Company, Filing Date               | Corporate entity matching, date precision         | 35%/40%/25%                    |
| Healthcare                | Prescription       | Patient, Medication, Dosage        | Patient identity, medication verification         | 35%/35%/30%                    |
|                           | Treatment Summary  | Patient, Diagnosis                 | Patient matching, diagnosis correlation           | 35%/40%/25%                    |
| Trade & Export/Import     | Letter of Credit   | Beneficiary, Amount                | Entity verification, 3% amount tolerance          | 35%/40%/25%                    |
|                           | Customs Declarations | Exporter, Goods                  | Company matching, goods classification            | 35%/40%/25%                    |
| Education & Certification | Student Application| Applicant, Program                 | Student identification, program alignment         | 35%/40%/25%                    |
|                           | Certificates       | Recipient, Course                  | Identity verification, course validation          | 35%/40%/25%                    |

### Advanced Scoring Algorithm:

#### Skills Analysis for HR Documents:
1. **Direct Match**: Exact skill name match = 100%
2. **Semantic Match**: Related skills (e.g., "React" & "React.js") = 90%
3. **Category Match**: Same category skills (e.g., "Python" & "JavaScript" both programming) = 70%
4. **Partial Match**: Subset skills (e.g., "Web Development" contains "HTML") = 60%

#### Experience Calculation:
1. **Total Experience**: Sum all work experience periods
2. **Relevant Experience**: Experience in related roles/industries
3. **Progressive Experience**: Consider career advancement
4. **Recency Factor**: Weight recent experience higher

#### Output Quality Requirements:
- **Detailed Field Analysis**: For each field, provide source value, target value, match percentage, and reasoning
- **Line Item Breakdown**: When applicable, compare individual line items with quantity, price, and total analysis
- **Issue Identification**: Flag specific discrepancies with severity levels (Critical, Major, Minor)
- **Recommendations**: Provide actionable insights based on comparison results

### Expected Output Format:

A comprehensive JSON object with detailed analysis:

{
  "summary": {
    "source": { "title": "string", "type": "string", "category": "string", "comment": "Detailed source analysis" },
    "targets": [{ "title": "string", "type": "string", "category": "string", "comment": "Target specifics" }],
    "comparison_type": "string",
    "status": "string",
    "issues_count": "integer",
    "match_score": "number",
    "category": "string",
    "recommendations": ["string"]
  },
  "targets": [
    {
      "index": "integer",
      "title": "string",
      "score": "number",
      "issues": ["string"],
      "match_level": "High|Medium|Low",
      "fields": [
        {
          "field": "string",
          "source_value": "any",
          "target_value": "any",
          "match": "boolean",
          "match_percentage": "number",
          "mismatch_type": "string or null",
          "weight": "number",
          "score": "number",
          "reasoning": "string"
        }
      ],
      "line_items": [
        {
          "id": "string",
          "name": "string",
          "source_quantity": "number or null",
          "target_quantity": "number or null",
          "source_price": "number or null",
          "target_price": "number or null",
          "quantity_match": "boolean",
          "price_match": "boolean",
          "total_match": "boolean",
          "variance_percentage": "number"
        }
      ],
      "detailed_analysis": {
        "strengths": ["string"],
        "weaknesses": ["string"],
        "critical_issues": ["string"],
        "recommendations": ["string"]
      }
    }
  ]
}

**IMPORTANT INSTRUCTIONS:**
1. **Always return valid JSON** - ensure proper syntax and structure
2. **Provide realistic match scores** - base on actual field comparisons, not placeholder values
3. **Include detailed reasoning** - explain why fields match or don't match
4. **Flag real issues** - identify actual discrepancies found in the data
5. **Use semantic analysis** - for HR documents, understand skill relationships and experience relevance
6. **Calculate accurate percentages** - based on actual field weights and match quality

**Source Document:** {sourceDoc}
**Target Documents:** {targetDocs}

Perform a comprehensive, accurate comparison and return detailed JSON results with realistic scores and meaningful analysis.
"""

PLACEHOLDER_PATTERN = re.compile(r"\{(sourceDoc|targetDocs)\}")


class GeminiPrompts:
    """Prompts for Gemini document processing"""

    @staticmethod
    def get_document_classification_prompt() -> str:
        """Taxonomy prompt: classify into 8 categories and extract content as JSON."""
        return DOCUMENT_CLASSIFICATION_PROMPT

    @staticmethod
    def get_quick_classification_prompt() -> str:
        return QUICK_CLASSIFICATION_PROMPT

    @staticmethod
    def get_invoice_extraction_prompt() -> str:
        return INVOICE_EXTRACTION_PROMPT

    @staticmethod
    def get_comparison_prompt(source_document: Any, target_documents: List[Dict[str, Any]]) -> str:
        """
        Fill the comparison prompt with the source extraction and the target list.

        Both payloads are serialized as 2-space indented JSON and substituted
        in a single pass, so placeholder text inside a payload is left as is.
        ``str.format`` is not usable because the template contains literal
        JSON braces.

        Args:
            source_document: Extracted JSON of the source document
            target_documents: List of ``{index, title, type, json}`` entries

        Returns:
            Prompt text ready to send to the model
        """
        source_doc = json.dumps(source_document, indent=2, default=str)
        target_docs = json.dumps(target_documents, indent=2, default=str)
        payloads = {"sourceDoc": source_doc, "targetDocs": target_docs}
        return PLACEHOLDER_PATTERN.sub(lambda match: payloads[match.group(1)], COMPARISON_PROMPT)
