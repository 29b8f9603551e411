"""Element names of the dictionary XML schema."""

LEMMA = "Lemma"
LEMMA_SIGN = "Lemma.LemmaSign"
LEMMA_ETYMOLOGY = "Lemma.Etimología"
OBSERVATIONS = "Observations"
VARIANTS = "Variants"

SENSE = "Sense"
SENSE_NUMBER = "Sense.SenseNumber"
SENSE_POS = "Sense.Categoría.Gramatical"
SENSE_ETYMOLOGY = "Sense.Etimología"
SENSE_SCIENTIFIC_NAME = "Sense.Nombre.Científico"

DEFINITION = "Definition"
DEFINITION_NUMBER = "Definition.Acepción"
DEFINITION_CONTORNO = "Definition.Contorno"
DEFINITION_TEXT = "Definition.Definición"
DEFINITION_USAGE = "Definition.Marca.de.uso"
DEFINITION_GEOGRAPHY = "Definition.Marca.geográfica"
DEFINITION_UTC = "Definition.UTC"

EXAMPLE = "Example"
EXAMPLE_TEXT = "Example.Example"
EXAMPLE_SOURCE = "Example.Source"
EXAMPLE_AD_HOC = "Example.Ad.hoc"

SUBENTRY = "Subentry"
SUBENTRY_SIGN = "Subentry.LemmaSign"

# Inline emphasis tags and their canonical HTML counterparts
INLINE_TAGS = {
    "bold": "b",
    "italic": "i",
    "underline": "u",
}

UNKNOWN_HEADWORD = "Desconocido"
