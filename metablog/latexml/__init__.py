"""LaTeXML conversion, output sanitising and result caching."""